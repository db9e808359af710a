"""Service layer — operations over record files returning ServiceResult."""
