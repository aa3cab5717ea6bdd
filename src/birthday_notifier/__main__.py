from birthday_notifier.main import main

raise SystemExit(main())
