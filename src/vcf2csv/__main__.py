from vcf2csv.cli import main

raise SystemExit(main())
