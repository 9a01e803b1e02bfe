# Utilities Package
