#!/usr/bin/env python
import os
import sys


def main():
    if sys.argv[1:2] == ['test']:
        os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'country_api.test_settings')
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'country_api.settings')
    from django.core.management import execute_from_command_line

    execute_from_command_line(sys.argv)


if __name__ == '__main__':
    main()
