"""Navigator Secrets Meta information.
   Navigator Secrets keeps API keys and other sensitive values in memory,
   loaded from the environment, dotenv files or (encrypted) JSON files.
"""
__title__ = 'navigator_secrets'
__description__ = (
   'Navigator Secrets is a thread-safe secret store with '
   'password-derived, encrypted-at-rest persistence.'
)
__version__ = '0.1.0'
__copyright__ = 'Copyright (c) 2023 Jesus Lara'
__author__ = 'Jesus Lara'
__author_email__ = 'jesuslarag@gmail.com'
__license__ = 'Apache-2.0'
__url__ = 'https://github.com/phenobarbital/navigator-secrets'
