# gclint: rule-based analyzer for C# sources (GC usage, disposal, naming, literals).

__version__ = "0.1.0"
