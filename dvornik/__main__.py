from dvornik.main import main

main()
