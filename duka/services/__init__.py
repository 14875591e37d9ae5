"""Services – business operations over the ports."""
