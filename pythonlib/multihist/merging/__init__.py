from .merge import merge, merge_mappings
