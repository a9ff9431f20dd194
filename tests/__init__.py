"""
automigrate Test Suite

Test categories:
- test_schema.py - Schema manager: open, create, alter, automigrate, plan
- test_db.py - Connection helpers, transactions, introspection
- test_fields.py - Field type mapping and audit fields
- test_models.py - Model definitions, YAML and SQLAlchemy sources
- test_config.py - Environment configuration and YAML loader
- test_cli.py - Command line interface
"""
