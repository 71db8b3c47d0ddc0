import sys

from queuer_sql.bootstrap import main

sys.exit(main())
