"""
Backend de la plateforme de concours: soumission d'entrées payantes (Stripe) stockées dans Supabase.
"""
