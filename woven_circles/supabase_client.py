from supabase import create_client, Client
from flask import current_app

def init_supabase(app, client=None) -> Client:
    """Initialize the Supabase client shared by the app's stores"""
    url = app.config['SUPABASE_URL']
    key = app.config['SUPABASE_KEY']
    if client is None:
        client = create_client(url, key)
        # Each viewer signs in on its own client so auth sessions never mix
        auth_factory = lambda: create_client(url, key).auth
    else:
        auth_factory = lambda: client.auth
    app.extensions['supabase'] = client
    app.extensions['supabase_auth'] = auth_factory
    return client

def get_supabase() -> Client:
    """Get the Supabase client for the current app"""
    return current_app.extensions['supabase']

def new_auth_client():
    """A fresh auth client for one viewer's sign-in session"""
    return current_app.extensions['supabase_auth']()
