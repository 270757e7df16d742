__version__ = "1.0.0"
__description__ = "restdoc : declarative Flask-SQLAlchemy REST resources with nested sub-resources"
