import sys

from gac.app import main

sys.exit(main())
