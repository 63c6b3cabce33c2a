from rbmerge.cli import main

raise SystemExit(main())
