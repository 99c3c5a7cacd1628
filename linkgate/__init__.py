"""Deep-link resolution and social-preview gateway for host-app mini-apps."""
