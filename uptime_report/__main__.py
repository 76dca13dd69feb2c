import sys

from uptime_report.cli import main

sys.exit(main())
