"""Provider signing-key and publisher membership verification."""
