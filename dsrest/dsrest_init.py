import logging
import os
import sys
from flask import Flask
from .request import DSRESTRequest
from .response import DSRESTResponse
import flask.app


class DSREST:
    """This class configures the Flask application to serve the dsrest resources
    :param app: a Flask application.
    :param LOGLEVEL: loglevel configuration variable, values from logging module (0: trace, .. 50: critical)
    """

    # Configuration settings are stored as class variables
    LOGLEVEL = logging.WARNING  # overridden by the DEBUG environment variable and the app config
    DSREST_BASE_URL = None  # prefix of the generated links, eg. http://localhost:5000
    ERROR_404_HELP = False  # flask-restful 404 "did you mean" messages

    def __init__(self, app: flask.app.Flask, *args, **kwargs) -> None:
        """
        Constructor
        """
        self.app = app
        if app is not None:
            self.init_app(app, *args, **kwargs)

    def init_app(self, app: flask.app.Flask, **kwargs) -> None:
        """
        Application initialization
        """
        if not isinstance(app, Flask):  # pragma: no cover
            raise TypeError("'app' should be Flask.")

        app.request_class = DSRESTRequest
        app.response_class = DSRESTResponse
        app.config.setdefault("ERROR_404_HELP", DSREST.ERROR_404_HELP)

        for conf_name, conf_val in kwargs.items():
            setattr(DSREST, conf_name, conf_val)

        log.setLevel(int(app.config.get("LOGLEVEL", DSREST.LOGLEVEL)))
        if app.config.get("DEBUG", False):
            log.setLevel(logging.DEBUG)

    @staticmethod
    def init_logging(loglevel: int = logging.WARNING) -> logging.Logger:
        """
        Specify the log format used in the webserver logs
        """
        log = logging.getLogger(__name__)
        if log.level == logging.NOTSET:
            handler = logging.StreamHandler(sys.stderr)
            formatter = logging.Formatter("[%(asctime)s] %(levelname)s: %(message)s")
            handler.setFormatter(formatter)
            log.setLevel(loglevel)
            log.addHandler(handler)
        return log


#
# logging initialization
#
try:
    DEBUG = os.getenv("DEBUG", logging.WARNING)
    LOGLEVEL = int(DEBUG)
except ValueError:  # pragma: no cover
    print(f'Invalid LogLevel in DEBUG Environment Variable! "{DEBUG}"')
    LOGLEVEL = logging.INFO

DSREST.LOGLEVEL = LOGLEVEL
log = DSREST.init_logging(LOGLEVEL)
