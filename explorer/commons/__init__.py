"""
Commons domain — config, legislatures, executives, memberships and page assembly.
"""
