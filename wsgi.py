# wsgi.py
from dotenv import load_dotenv
load_dotenv()  # loads .env before config

from bet_tracker import create_app
app = create_app()
