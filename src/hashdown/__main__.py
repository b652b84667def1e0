from hashdown.cli import main

raise SystemExit(main())
