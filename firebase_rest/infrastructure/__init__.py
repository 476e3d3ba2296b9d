"""Infrastructure layer: Firestore REST integration and transport exceptions."""
