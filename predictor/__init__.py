"""College admission predictor: catalog models, engine and API routes."""
