import sys

from arch_engine.main import main

sys.exit(main())
