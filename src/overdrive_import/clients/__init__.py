"""HTTP clients for the OverDrive OAuth and catalog APIs."""
