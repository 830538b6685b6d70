"""Parsing and deobfuscation of LDAP SearchFilters"""
__version__ = "0.4.0"

__title__ = "ldapdeob"
__description__ = "Parsing and deobfuscation of LDAP SearchFilters"

__license__ = "MIT"
__author__ = "The ldapdeob developers"
__copyright__ = "Copyright (c) 2024 {}".format(__author__)
