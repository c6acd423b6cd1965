import sys

from autoyaml_generator.cli import main

sys.exit(main())
