from calcpad.cli import main

raise SystemExit(main())
