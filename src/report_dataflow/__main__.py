import sys

from report_dataflow.cli import main

sys.exit(main())
