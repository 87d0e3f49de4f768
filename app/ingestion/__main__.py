import sys

from app.ingestion.cli import main

sys.exit(main())
