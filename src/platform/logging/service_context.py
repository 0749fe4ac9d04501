"""
Service identification for log lines.

Every line carries `service@env:worker` so that output from several
granian workers (or several containers) can be told apart.
"""

from functools import lru_cache
import os
import socket


@lru_cache(maxsize=1)
def get_service_context() -> str:
    service_name = os.getenv('SERVICE_NAME', 'trip-booking')
    deploy_env = os.getenv('DEPLOY_ENV', 'local_dev')

    if deploy_env == 'local_dev':
        worker = str(os.getpid())
    else:
        # Container hostnames are already unique; keep the short form
        worker = socket.gethostname().split('.')[0][:12]

    return f'{service_name}@{deploy_env}:{worker}'
