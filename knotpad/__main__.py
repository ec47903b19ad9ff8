from knotpad.app import main

raise SystemExit(main())
