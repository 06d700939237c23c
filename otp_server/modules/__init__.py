"""Feature modules: accounts, wallets, phone transactions, catalog and purchases."""
