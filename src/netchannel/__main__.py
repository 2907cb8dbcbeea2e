from netchannel.cli import main

raise SystemExit(main())
