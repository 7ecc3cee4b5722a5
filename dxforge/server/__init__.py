"""Language server core, Rust symbol extraction and authentication."""