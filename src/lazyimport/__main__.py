import sys

from lazyimport.cli import main

sys.exit(main())
