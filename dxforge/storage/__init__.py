"""Blob storage, the forge database schema and repository setup."""