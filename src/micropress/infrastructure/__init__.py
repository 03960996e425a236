"""Site root access: path resolution, atomic writes, the Site bundle."""
