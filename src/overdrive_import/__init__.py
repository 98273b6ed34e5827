"""OverDrive catalog import for WP All Import.

Fetches product pages and bulk metadata from the OverDrive API, merges them
into batch files for the import tool, and derives keyword tags for records.
"""
