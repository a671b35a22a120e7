from skgraph.cli import main

raise SystemExit(main())
