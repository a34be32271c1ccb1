from __future__ import annotations

from loop_repair.main import main

raise SystemExit(main())
