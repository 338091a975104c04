"""Pure aggregation over parsed git records."""
