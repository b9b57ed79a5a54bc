from layersearch.cli import main

raise SystemExit(main())
