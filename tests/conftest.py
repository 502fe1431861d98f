"""Shared fixtures for nextport tests."""
import textwrap

import pytest


@pytest.fixture(autouse=True)
def nextport_home(tmp_path, monkeypatch):
    """Point HOME and the working directory at a temporary directory.

    This ensures tests never read or write real config files. The cached
    config service is reset so every test resolves its own layers.
    """
    home = tmp_path / "home"
    home.mkdir()
    work = tmp_path / "work"
    work.mkdir()

    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(work)
    for name in (
        "NEXTPORT_MAX_WORKERS", "NEXTPORT_TIME_BUDGET_MS", "NEXTPORT_CLIENT_DIRECTIVE",
        "NEXTPORT_APP_NAME", "NEXTPORT_ISR_REVALIDATE", "NEXTPORT_MAX_FILE_BYTES",
        "NEXTPORT_MAX_TOTAL_BYTES", "NEXTPORT_PLAIN", "NEXTPORT_DEBUG",
    ):
        monkeypatch.delenv(name, raising=False)

    from nextport.core import config_service
    config_service.reset_config_service()
    yield home
    config_service.reset_config_service()


def dedent(text: str) -> str:
    return textwrap.dedent(text).lstrip("\n")


@pytest.fixture
def router_project():
    """A small CRA-style project with react-router, redux and env variables."""
    return {
        "package.json": dedent("""
            {
              "name": "shop",
              "version": "1.2.0",
              "dependencies": {
                "react": "^18.2.0",
                "react-dom": "^18.2.0",
                "react-router-dom": "^6.22.0",
                "react-redux": "^9.1.0",
                "@reduxjs/toolkit": "^2.2.0",
                "react-scripts": "5.0.1"
              }
            }
        """),
        ".env": "REACT_APP_API_URL=https://api.shop.test\nSECRET_TOKEN=abc\n",
        "public/index.html": "<!DOCTYPE html><html><body><div id=\"root\"></div></body></html>\n",
        "public/logo.png": "[BINARY]",
        "src/index.js": dedent("""
            import React from 'react';
            import { createRoot } from 'react-dom/client';
            import './index.css';
            import App from './App';

            createRoot(document.getElementById('root')).render(<App />);
        """),
        "src/index.css": "body { margin: 0; }\n",
        "src/App.jsx": dedent("""
            import { BrowserRouter, Routes, Route } from 'react-router-dom';
            import { Provider } from 'react-redux';
            import { store } from './store';
            import Home from './pages/Home';
            import Product from './pages/Product';

            export default function App() {
              return (
                <Provider store={store}>
                  <BrowserRouter>
                    <Routes>
                      <Route path="/" element={<Home />} />
                      <Route path="/products/:id" element={<Product />} />
                    </Routes>
                  </BrowserRouter>
                </Provider>
              );
            }
        """),
        "src/pages/Home.jsx": dedent("""
            import { Link } from 'react-router-dom';
            import Button from '../components/Button';

            export default function Home() {
              return (
                <main>
                  <h1>Shop</h1>
                  <Link to="/products/1">First product</Link>
                  <Button label="Go" />
                </main>
              );
            }
        """),
        "src/pages/Product.jsx": dedent("""
            import { useParams, useNavigate } from 'react-router-dom';
            import { useSelector } from 'react-redux';

            export default function Product() {
              const { id } = useParams();
              const navigate = useNavigate();
              const item = useSelector((state) => state.items[id]);
              return <button onClick={() => navigate('/')}>{item.name}</button>;
            }
        """),
        "src/components/Button.jsx": dedent("""
            export default function Button({ label }) {
              return <span className="button">{label}</span>;
            }
        """),
        "src/store.js": dedent("""
            import { configureStore } from '@reduxjs/toolkit';

            export const store = configureStore({ reducer: {} });
        """),
    }
