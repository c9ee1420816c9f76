"""Qt layer of netBrowse."""
