import logging

__version__ = '0.3.0'

# nothing reaches stderr (the peer, under inetd) before logging is set up
logging.getLogger('geoip_tcpd').addHandler(logging.NullHandler())
