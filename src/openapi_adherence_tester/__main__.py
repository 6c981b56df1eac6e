"""Allow ``python -m openapi_adherence_tester``."""

from __future__ import annotations

from .cli import main

raise SystemExit(main())
