__version__ = "1.0.0"
__description__ = "dsrest : Data Source JSON:API REST layer for Flask"
