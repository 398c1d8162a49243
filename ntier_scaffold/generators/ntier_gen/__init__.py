"""Schema-to-C# N-tier layer generation."""
