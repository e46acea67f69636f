from __future__ import annotations

import streamlit as st

from daypass.config import configure_logging, get_settings

st.set_page_config(page_title="Day Pass Store", page_icon="🎟️", layout="wide")
configure_logging(get_settings().log_level)

pages = [
    st.Page("home.py", title="Store", icon="🎟️"),
    st.Page("pages/1_🛠️_Admin.py", title="Admin", icon="🛠️"),
    st.Page("pages/2_🧪_Data_Management.py", title="Data Management", icon="🧪"),
]

st.navigation(pages).run()
