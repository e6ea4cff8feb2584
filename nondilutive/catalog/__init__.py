"""
Generation catalog (file-based, admin-applied).

Loads generation definitions from `GENERATION_CATALOG_DIR` (YAML or JSON, one
generation per file) so a deployment can preload its generations at startup.
"""
