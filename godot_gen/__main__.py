from godot_gen.gen import main

main()
