"""HTTP surface of the kotoba engine."""
