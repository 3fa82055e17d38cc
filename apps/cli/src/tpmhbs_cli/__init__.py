"""Command-line front end for tpmhbs (``tpmhbs estimate``, ``schemes``, ``info``)."""
