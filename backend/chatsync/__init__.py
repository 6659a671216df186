"""Sincronización de conversaciones de Chatbase hacia interaction_logs en Supabase."""
