"""
Cooking Assistant - Home Page

A recipe community with an AI chef that guides you through recipes
by text, photo and voice.
"""

import streamlit as st

# Page configuration (must be first Streamlit command)
st.set_page_config(
    page_title="Cooking Assistant",
    page_icon="🍳",
    layout="wide"
)

from config.database import init_db
from config.logging_config import configure_logging
from views.home_view import HomeView

configure_logging()
init_db()

view = HomeView()
view.render()
