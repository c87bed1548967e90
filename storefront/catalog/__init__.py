"""
Module 'catalog': produits et Product Store (mémoire ou Supabase).
"""
