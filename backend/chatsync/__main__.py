from chatsync.cli import main

raise SystemExit(main())
