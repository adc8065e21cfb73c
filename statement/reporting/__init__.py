"""Statement rendering: token mapping, HTML fragments, pagination feedback."""
