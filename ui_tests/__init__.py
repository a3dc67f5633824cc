"""UI test suites run by SheetRunner."""
