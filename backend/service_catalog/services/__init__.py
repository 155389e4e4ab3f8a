"""
Application services: inbound event handling, relation reconciliation and
the administrative use-cases.
"""
