import sys

from duka.main import main

sys.exit(main())
