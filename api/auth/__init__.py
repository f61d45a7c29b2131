"""Registration, login and bearer-token identity."""
