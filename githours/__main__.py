import sys

from githours.cli import main

sys.exit(main())
