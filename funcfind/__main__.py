from funcfind.cli import main

raise SystemExit(main())
