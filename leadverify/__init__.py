"""Lead verification: county-records extraction and motivation scoring."""
